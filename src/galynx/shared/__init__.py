"""Shared helpers: exceptions, URL handling, guarded state"""
