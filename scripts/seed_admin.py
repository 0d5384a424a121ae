# scripts/seed_admin.py
import argparse
import asyncio

from core.constants import SYSTEM_CALLER
from core.database import Satellite
from core.exceptions import ConflictError
from core.roles import AdminRole
from schemas.auth import IdentityRegister
from services.admin_service import AdminService
from services.auth_service import AuthService


async def seed(principal: str, email: str, credential: str):
    satellite = Satellite.from_settings()
    await satellite.open()
    try:
        async with satellite.session() as session:
            # 🔹 identity
            print("🔹 Creating identity...")
            try:
                await AuthService(session).register_identity(IdentityRegister(
                    principal=principal,
                    display_name="Super Admin",
                    email=email,
                    credential=credential,
                ))
                print(f"  identity: {principal}")
            except ConflictError:
                print("⚠️ Identity already exists")

            # 🔹 super admin
            print("\n🔹 Creating super admin...")
            service = AdminService(session)
            if await service.is_admin(principal):
                print("⚠️ Super admin already exists")
            else:
                await service.add_admin(
                    principal,
                    SYSTEM_CALLER,
                    role=AdminRole.SUPER_ADMIN,
                    email=email,
                    name="Super Admin",
                )
                print("✅ Super admin created!")
                print(f"  principal: {principal}")
                print(f"  email: {email}")
    finally:
        await satellite.close()

    print("\n" + "=" * 50)
    print("✅ Seeding done!")
    print("=" * 50)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the first super admin")
    parser.add_argument("--principal", default="superadmin")
    parser.add_argument("--email", default="admin@example.com")
    parser.add_argument("--credential", default="admin12345")
    args = parser.parse_args()
    asyncio.run(seed(args.principal, args.email, args.credential))
