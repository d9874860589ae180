"""Command-line interface for FundMe"""
