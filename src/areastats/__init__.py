"""
areastats: import, merge and tabulate Welsh Government statistics by area.
"""
