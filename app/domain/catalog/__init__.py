"""Catalog domain - services, addons, zones, pricing rules and coupons"""
