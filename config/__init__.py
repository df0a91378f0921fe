"""Configuration for the Cash Flow Risk Engine"""
