"""
Configuration Endpoint
Serves the configuration UI and generates signed tokens
"""
from typing import List
from uuid import UUID
from fastapi import APIRouter, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, Field, ValidationError
from app.core.config import settings
from app.models.config import UserConfig
from app.utils.crypto import encrypt_secret
from app.utils.token import encode_config

router = APIRouter()


class ConfigRequest(BaseModel):
    """Request model for token generation"""
    auth_token: str = Field(..., min_length=1)
    libraries: List[UUID]
    server_name: str = "Jellyfin"
    encrypt_token: bool = True


@router.post("/generate-token")
async def generate_token(request: ConfigRequest):
    """
    Generate a signed token from user configuration
    The Jellyfin access token is encrypted unless encrypt_token is false
    """
    try:
        if request.encrypt_token:
            user_config = UserConfig(
                auth_token_enc=encrypt_secret(request.auth_token),
                libraries=request.libraries,
                server_name=request.server_name,
            )
        else:
            user_config = UserConfig(
                auth_token=request.auth_token,
                libraries=request.libraries,
                server_name=request.server_name,
            )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    token = encode_config(user_config)

    base_url = str(settings.BASE_URL).rstrip('/')
    install_url = f"{base_url}/{token}/manifest.json"

    return JSONResponse({
        "success": True,
        "token": token,
        "install_url": install_url
    })


@router.get("/", response_class=HTMLResponse)
@router.get("/configure", response_class=HTMLResponse)
async def configure_page():
    """Serve configuration page"""

    html_content = r"""
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>__APP_NAME__ - Configure</title>
    <style>
        * { box-sizing: border-box; margin: 0; padding: 0; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            background: #101820;
            min-height: 100vh;
            display: flex;
            justify-content: center;
            align-items: center;
            padding: 20px;
        }
        .container {
            background: white;
            border-radius: 12px;
            max-width: 600px;
            width: 100%;
            padding: 40px;
        }
        h1 { color: #333; margin-bottom: 10px; font-size: 26px; }
        .subtitle { color: #666; margin-bottom: 30px; font-size: 14px; }
        .form-group { margin-bottom: 20px; }
        label { display: block; margin-bottom: 8px; color: #333; font-weight: 500; font-size: 14px; }
        input[type="text"] {
            width: 100%;
            padding: 12px;
            border: 2px solid #e0e0e0;
            border-radius: 8px;
            font-size: 14px;
        }
        .helper-text { font-size: 12px; color: #999; margin-top: 4px; }
        button {
            width: 100%;
            padding: 14px;
            background: #00a4dc;
            color: white;
            border: none;
            border-radius: 8px;
            font-size: 16px;
            cursor: pointer;
        }
        .url-box {
            margin-top: 20px;
            word-break: break-all;
            font-family: 'Courier New', monospace;
            font-size: 12px;
        }
        .error { color: #d32f2f; font-size: 14px; margin-top: 10px; }
    </style>
</head>
<body>
    <div class="container">
        <h1>__APP_NAME__</h1>
        <p class="subtitle">Play your Jellyfin library in Stremio</p>

        <form id="configForm">
            <div class="form-group">
                <label for="auth_token">Jellyfin Access Token *</label>
                <input type="text" id="auth_token" required>
                <div class="helper-text">Dashboard → API Keys, or a user's access token</div>
            </div>

            <div class="form-group">
                <label for="libraries">Library IDs *</label>
                <input type="text" id="libraries" required placeholder="id1, id2">
                <div class="helper-text">Comma separated ids of the libraries to expose as catalogs</div>
            </div>

            <div class="form-group">
                <label for="server_name">Server Name</label>
                <input type="text" id="server_name" value="Jellyfin">
            </div>

            <button type="submit">Generate Install URL</button>
            <div class="error" id="error"></div>
        </form>

        <div class="url-box" id="urlBox"></div>
    </div>

    <script>
        document.getElementById('configForm').addEventListener('submit', async (e) => {
            e.preventDefault();
            const errorDiv = document.getElementById('error');
            const config = {
                auth_token: document.getElementById('auth_token').value.trim(),
                libraries: document.getElementById('libraries').value.split(',')
                    .map(s => s.trim()).filter(s => s),
                server_name: document.getElementById('server_name').value.trim() || 'Jellyfin'
            };
            errorDiv.textContent = '';
            try {
                const response = await fetch('/generate-token', {
                    method: 'POST',
                    headers: { 'Content-Type': 'application/json' },
                    body: JSON.stringify(config)
                });
                if (!response.ok) {
                    const error = await response.json();
                    throw new Error(JSON.stringify(error.detail) || 'Failed to generate token');
                }
                const data = await response.json();
                const urlBox = document.getElementById('urlBox');
                urlBox.textContent = data.install_url;
                const install = document.createElement('a');
                install.href = data.install_url.replace(/^https?:\/\//, 'stremio://');
                install.textContent = 'Install in Stremio';
                urlBox.appendChild(document.createElement('br'));
                urlBox.appendChild(install);
            } catch (err) {
                errorDiv.textContent = 'Failed to generate URL: ' + err.message;
            }
        });
    </script>
</body>
</html>
    """

    return html_content.replace("__APP_NAME__", settings.APP_NAME)
