"""
Montage des fichiers statiques.
Expose:
- /public -> script de redirection à inclure dans le thème Shopify (egypt-checkout.js)
"""
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from regional_checkout.config import PUBLIC_DIR

def mount_static_files(app: FastAPI) -> None:
    app.mount("/public", StaticFiles(directory=str(PUBLIC_DIR)), name="public")
