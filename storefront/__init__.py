"""Backend de la boutique SOL Apparel (FastAPI + Supabase)."""
