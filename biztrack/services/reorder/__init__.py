"""Replenishment analytics, priority scoring and the reorder lifecycle"""
