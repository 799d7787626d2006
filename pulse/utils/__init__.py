"""Shared helpers: time bucketing and error handling"""
