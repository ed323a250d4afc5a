"""Application layer: session context, bootstrap, events and commands"""
