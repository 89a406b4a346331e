"""Locust load script for the Jellio addon.
Usage:
  JELLIO_TOKEN="<token>" JELLIO_CATALOG="<library id>" locust -f perf/locustfile.py --host http://localhost:8000
"""
import os
from locust import HttpUser, task, between

TOKEN = os.getenv("JELLIO_TOKEN", "")
CATALOG = os.getenv("JELLIO_CATALOG", "")
CATALOG_TYPE = os.getenv("JELLIO_CATALOG_TYPE", "movie")
IMDB_ID = os.getenv("JELLIO_IMDB_ID", "tt0137523")
PAGES = int(os.getenv("JELLIO_PAGES", "3"))


class StremioUser(HttpUser):
    wait_time = between(0.2, 1.0)

    def on_start(self):
        if not TOKEN or not CATALOG:
            raise RuntimeError("Set JELLIO_TOKEN and JELLIO_CATALOG env vars before running locust")

    @task(1)
    def manifest(self):
        self.client.get(f"/{TOKEN}/manifest.json")

    @task(3)
    def catalog(self):
        self.client.get(f"/{TOKEN}/catalog/{CATALOG_TYPE}/{CATALOG}.json")

    @task(1)
    def paginate(self):
        # Walk a few pages to exercise skip handling
        for page in range(PAGES):
            self.client.get(
                f"/{TOKEN}/catalog/{CATALOG_TYPE}/{CATALOG}/skip={page * 100}.json",
                name="/catalog/[page]",
            )

    @task(2)
    def movie_streams(self):
        self.client.get(f"/{TOKEN}/stream/movie/{IMDB_ID}.json", name="/stream/movie/[imdb]")
