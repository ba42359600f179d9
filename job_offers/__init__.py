"""Job offers ingestion package.

The package is structured around one ingestion cycle and one read path:
- `sources/` contains per-provider connectors that fetch raw JSON.
- `normalize.py` reconciles provider payload shapes into `models.JobOffer`.
- `store.py` persists offers without duplicating earlier cycles and answers queries.
- `pipeline.py` / `scheduler.py` run fetch -> normalize -> write on a fixed cadence.
- `api.py` serves the stored offers over HTTP.
"""
