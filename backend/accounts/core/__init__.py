"""
Core application modules.
Contains essential infrastructure components:
- db: Tortoise ORM configuration and connection management
- errors: Error taxonomy and JSON error handlers
- security: Password hashing and access token issuance/verification
- store: User record store interface and implementations
"""
