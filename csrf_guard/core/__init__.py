"""Core configuration, logging, exceptions and security components"""
