"""Booking domain - intake, lifecycle, listing and admin overview"""
