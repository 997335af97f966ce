#!/usr/bin/env python3
"""
Generate JWT signing secrets for .env
"""

import secrets

print("=" * 60)
print("JWT Secret Generator")
print("=" * 60)
print()
print("Add these to your .env file:")
print()
print(f"JWT_ACCESS_SECRET={secrets.token_urlsafe(48)}")
print(f"JWT_REFRESH_SECRET={secrets.token_urlsafe(48)}")
print()
print("⚠️  WARNING: Changing these secrets invalidates every issued")
print("   token; users will have to log in again.")
print("=" * 60)
