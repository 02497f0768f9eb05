"""
gitpartsync - Git partition sync producer.

Keeps an S3 bucket holding exactly one encrypted archive per declared
destination, up to date with the latest commit of its source branch.
"""

__version__ = "0.1.0"
