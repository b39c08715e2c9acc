"""
@file docs.py
@brief HTML page served at the application root

@author Market Research Project
@date 2025-03-19
@version 1.0
@license AGPL-3.0
"""


def get_root_documentation() -> str:
    """
    @brief Short HTML overview of the API
    """
    return """<!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <title>Market Research API</title>
        <style>
            body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
                   max-width: 760px; margin: 40px auto; color: #333; line-height: 1.6; }
            code { background: #f4f4f4; padding: 2px 6px; border-radius: 4px; }
            li { margin-bottom: 8px; }
        </style>
    </head>
    <body>
        <h1>Market Research API</h1>
        <p>Collects city demographics and metro area job growth for U.S. states and
        produces an Excel report plus a raw city list per state.</p>
        <h2>Endpoints</h2>
        <ul>
            <li><code>POST /api/scrape</code> with
                <code>{"states": ["Texas"], "minPopulation": 50000, "googleMapsApiKey": "..."}</code></li>
            <li><code>GET /api/files</code> lists generated files, newest first</li>
            <li><code>GET /api/download/{filename}</code> downloads one file</li>
            <li><code>GET /health</code>, <code>/health/ready</code>, <code>/health/live</code></li>
            <li><code>GET /api/docs</code> interactive OpenAPI documentation</li>
        </ul>
        <h2>Data sources</h2>
        <p>City data from city-data.com, employment series from the U.S. Bureau of Labor
        Statistics (data.bls.gov), coordinates from the Google Geocoding API. This service is
        not affiliated with any of these providers.</p>
    </body>
    </html>
    """
