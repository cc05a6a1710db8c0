"""
IShare Mock Backend
===================
Entry point. Run with: uvicorn main:app --reload
"""

import uvicorn

from ishare.mockserver.app import create_asgi_app

app = create_asgi_app()

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
