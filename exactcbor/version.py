"""1.0.0.2026.1019.0000.00"""
