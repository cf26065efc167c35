"""
Reinitialisation de la base / Database reset and seed.

Usage:
    DATABASE_URL=sqlite+aiosqlite:///./install_tracker.db \
    python -m scripts.reset_and_seed

    # Vider sans recharger / Clear without reseeding
    SKIP_SEED=1 python -m scripts.reset_and_seed
"""

import asyncio
import os
import sys

# Rendre le package importable / Make the package importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from install_tracker.database import async_session, engine, init_db
from install_tracker.services.admin_service import AdminService
from install_tracker.utils.seed import apply_seed_data


async def reset_and_seed() -> int:
    skip_seed = os.getenv("SKIP_SEED", "").lower() in ("1", "true", "yes")
    failures = 0

    print("[reset] Creation du schema...")
    await init_db()

    async with async_session() as session:
        for row in await AdminService.reset_database(session):
            if row["success"]:
                print(f"[reset]   {row['table']}: {row['deleted']} lignes supprimees")
            else:
                failures += 1
                print(f"[reset]   {row['table']}: ERREUR {row['error']}")

        if skip_seed:
            print("[reset] SKIP_SEED actif, base laissee vide")
        else:
            print("[seed] Chargement des donnees de reference...")
            for row in await apply_seed_data(session):
                if row["success"]:
                    print(f"[seed]   {row['table']}: {row['count']} lignes")
                else:
                    failures += 1
                    print(f"[seed]   {row['table']}: ERREUR {row['error']}")

    await engine.dispose()

    if failures:
        print(f"[reset] Termine avec {failures} erreur(s)")
        return 1
    print("[reset] Termine")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(reset_and_seed()))
