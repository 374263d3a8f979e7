"""Interactive command line interface"""
