"""Recent/archive notification synchronizer"""
