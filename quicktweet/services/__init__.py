"""
High-level use cases for the QuickTweet backend.

Each service module orchestrates the repository to implement business rules
(register, approve, befriend, delete an account, etc.). Routers call these
services instead of touching the database directly.
"""
