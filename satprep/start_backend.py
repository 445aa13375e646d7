#!/usr/bin/env python3
"""
Backend startup wrapper - runs the FastAPI app under uvicorn.
"""
import os
import sys

if __name__ == "__main__":
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))

    print("[Backend] Starting SAT prep backend")
    print(f"[Backend] Server: http://localhost:{port}")
    print("[Backend] Press CTRL+C to stop")
    print()

    try:
        import uvicorn
        uvicorn.run(
            "satprep.main:app",
            host=host,
            port=port,
            reload=False,
            log_level="info",
            access_log=True
        )
    except KeyboardInterrupt:
        print("\n[Backend] Shutting down...")
        sys.exit(0)
