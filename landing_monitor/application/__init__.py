"""
Application module - Use cases coordinating ports and the health engine.
"""
