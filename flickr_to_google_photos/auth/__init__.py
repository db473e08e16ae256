"""
OAuth handshake helpers.
"""
