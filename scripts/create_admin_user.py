import argparse
import logging

from dotenv import load_dotenv

from database.live import PROFILES_TABLE
from database.live import get_supabase_client
from models.enums import UserRole, UserTier
from models.schema import utc_now

load_dotenv()
logging.basicConfig(level=logging.INFO)


def create_admin_user(email: str, password: str, name: str) -> None:
    """
    Create a confirmed Supabase Auth user and give its profile the admin role.
    """
    supabase = get_supabase_client()
    if not supabase:
        print("❌ Supabase client not initialized. Check your .env file.")
        return

    print(f"Attempting to create admin user: {email}")

    try:
        attributes = {
            "email": email,
            "password": password,
            "email_confirm": True,
            "user_metadata": {"name": name},
        }
        response = supabase.auth.admin.create_user(attributes)
        user_id = response.user.id
        print(f"User created successfully! ID: {user_id}")
    except Exception as e:
        if "already registered" in str(e) or "already exists" in str(e):
            print("User already exists; promoting the existing profile.")
            rows = supabase.table(PROFILES_TABLE).select("id").eq("email", email).execute().data
            if not rows:
                print("❌ No profile row found. Log in once, then rerun.")
                return
            user_id = rows[0]["id"]
        else:
            print(f"Failed to create user: {e}")
            return

    now = utc_now().isoformat()
    supabase.table(PROFILES_TABLE).upsert({
        "id": user_id,
        "email": email,
        "name": name,
        "tier": UserTier.MASTER.value,
        "role": UserRole.ADMIN.value,
        "created_at": now,
        "last_login": now,
    }, on_conflict="id").execute()
    print(f"✅ {email} is now an administrator.")


def main():
    parser = argparse.ArgumentParser(description="Create or promote a Quester administrator.")
    parser.add_argument("email")
    parser.add_argument("password")
    parser.add_argument("--name", default="Admin")
    args = parser.parse_args()
    create_admin_user(args.email, args.password, args.name)


if __name__ == "__main__":
    main()
