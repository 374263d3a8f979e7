"""Video job client services"""
