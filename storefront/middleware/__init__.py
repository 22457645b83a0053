"""HTTP middleware: security headers, input sanitizing and rate limits"""
