import argparse
import logging

from dotenv import load_dotenv

from database.factory import create_data_service, resolve_backend_mode
from models.defaults import INITIAL_TIER_CONFIGS, default_system_config, official_templates

# Load environment variables
load_dotenv()
logging.basicConfig(level=logging.INFO)


def seed(backend: str, with_templates: bool = False) -> None:
    """
    Write the default tier configs and system config to the chosen backend.
    """
    data = create_data_service(resolve_backend_mode(backend))

    print(f"🎚️ Upserting {len(INITIAL_TIER_CONFIGS)} tier configs...")
    data.config.update_tier_configs(dict(INITIAL_TIER_CONFIGS))

    print("⚙️ Writing system config (all featured modes off)...")
    data.config.update_config(default_system_config())

    if with_templates:
        templates = official_templates()
        print(f"🗺️ Saving {len(templates)} official templates...")
        for template in templates:
            data.events.save_event(template)

    print("✅ Seeding complete!")


def main():
    parser = argparse.ArgumentParser(description="Seed Quester configuration.")
    parser.add_argument("--backend", default=None, help="mock or live (default: QUESTER_BACKEND)")
    parser.add_argument("--templates", action="store_true", help="Also store the official templates.")
    args = parser.parse_args()

    try:
        seed(args.backend, args.templates)
    except (ConnectionError, ValueError) as e:
        print(f"❌ Error during seeding: {e}")


if __name__ == "__main__":
    main()
