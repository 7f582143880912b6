"""
Normalize package: turn raw GitHub events-feed and search-feed JSON into ActivityRecord objects.
"""
