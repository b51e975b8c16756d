"""
Signing wallet: key derivation, addresses and P2WPKH signing.
"""
