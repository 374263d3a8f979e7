"""Polling and deadline handling"""
