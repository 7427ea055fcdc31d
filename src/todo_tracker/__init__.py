"""Scan a tree for TODO[tag]: markers, track first-seen dates, render Markdown."""
