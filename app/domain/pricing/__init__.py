"""Pricing domain - typed pricing rules and the pricing engine"""
