"""
Document Relay - credential-gatekeeping HTTP relay for document databases
"""
__version__ = "1.0.0"
