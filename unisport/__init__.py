"""
unisport: scrape a university sports course listing into one table.
"""
