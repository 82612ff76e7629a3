"""
HTTP API for vectorchat.
"""
