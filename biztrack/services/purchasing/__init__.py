"""Purchase order generation and purchase primitives"""
