"""
Chat app for messaging between task participants.

Related apps:
    - authentication: User model for participants
    - marketplace: Task a conversation is about
"""
