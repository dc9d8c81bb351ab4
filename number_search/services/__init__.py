# Services
#
# Organized by domain:
#   - providers/  Vendor API clients (Forager, Aviato)
#   - matching/   Name matching and industry -> company resolution
#   - db/         Database clients (Supabase)
#
# enrichment.py, lookup.py and leads.py sit at the root as orchestrators
