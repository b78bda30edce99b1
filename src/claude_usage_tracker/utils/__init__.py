"""Utility helpers for Claude Usage Tracker."""
