"""Salesboard: monthly sales reports over seeded product transactions."""
