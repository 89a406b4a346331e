#!/usr/bin/env python3
"""
Generate Installation Token Script
Creates a properly signed token for manual Stremio addon installation
"""
import sys
from uuid import UUID
from pydantic import ValidationError
from app.models.config import UserConfig
from app.utils.crypto import encrypt_secret
from app.utils.token import encode_config
from app.core.config import settings


def main():
    print(f"🎬 {settings.APP_NAME} - Token Generator")
    print("=" * 60)

    auth_token = input("\n1. Enter your Jellyfin access token: ").strip()
    if not auth_token:
        print("❌ Jellyfin access token is required!")
        sys.exit(1)

    raw_libraries = input("2. Library IDs (comma separated): ").strip()
    try:
        libraries = [UUID(part.strip()) for part in raw_libraries.split(",") if part.strip()]
    except ValueError:
        print("❌ Library IDs must be Jellyfin GUIDs!")
        sys.exit(1)
    if not libraries:
        print("❌ At least one library is required!")
        sys.exit(1)

    server_name = input("3. Server name (default: Jellyfin): ").strip() or "Jellyfin"

    encrypt = input("4. Encrypt access token in URL? (Y/n): ").strip().lower()
    encrypt = encrypt != 'n'

    try:
        config = UserConfig(
            auth_token=None if encrypt else auth_token,
            auth_token_enc=encrypt_secret(auth_token) if encrypt else None,
            libraries=libraries,
            server_name=server_name,
        )
    except ValidationError as e:
        print(f"\n❌ Error generating token: {e}")
        sys.exit(1)

    token = encode_config(config)

    base_url = str(settings.BASE_URL).rstrip('/')
    install_url = f"{base_url}/{token}/manifest.json"

    print("\n" + "=" * 60)
    print("✅ Token generated successfully!")
    print("=" * 60)
    print(f"\n📋 Install URL:\n{install_url}\n")
    print("🔗 Installation Steps:")
    print("  1. Copy the URL above")
    print("  2. Open Stremio")
    print("  3. Go to Add-ons → Install from URL")
    print("  4. Paste the URL and click Install")
    if encrypt:
        print("\n⚠️  Encrypted tokens only work while CREDENTIAL_KEY/TOKEN_SALT stay the same")
    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
