#!/usr/bin/env python3
"""
Mebius Storefront Runner
========================

Runs the API server or the background workers.

Usage:
    python run_app.py                    # API server, auto-reload (default)
    python run_app.py --mode prod        # API server with workers, no reload
    python run_app.py --mode worker      # Celery worker (payments + default queues)
    python run_app.py --mode beat        # Celery beat (reconciliation schedule)
    python run_app.py --port 8001        # Custom port
    python run_app.py --host 127.0.0.1   # Custom host
"""

import argparse
import os
import sys

def print_banner(mode: str):
    banner = f"""
╔═══════════════════════════════════════════════════════╗
║                   Mebius Storefront                   ║
║                   mode: {mode:<30}║
╚═══════════════════════════════════════════════════════╝
    """
    print(banner)

def check_environment():
    """Warn about settings that leave parts of the store disabled"""
    from storefront.core.config import settings

    print("\n🔍 Checking environment...")

    if os.path.exists(".env"):
        print("✅ .env file found")
    else:
        print("⚠️  .env file not found, using defaults")

    missing = [
        name for name in ("CLERK_JWT_KEY", "STRIPE_SECRET_KEY", "STRIPE_WEBHOOK_SECRET", "CLOUDINARY_API_SECRET")
        if not getattr(settings, name)
    ]
    for name in missing:
        print(f"⚠️  {name} is not set")

    return True

def run_api(host: str, port: int, reload: bool, workers: int):
    import uvicorn

    print(f"\n🚀 Starting API on {host}:{port}")
    print(f"📖 API Docs: http://{host}:{port}/api/docs")
    print("\n" + "=" * 50)

    uvicorn.run(
        "storefront.main:app",
        host=host,
        port=port,
        reload=reload,
        workers=1 if reload else workers,
        log_level="info"
    )

def run_celery(mode: str):
    from storefront.core.celery_app import celery_app

    if mode == "worker":
        argv = ["worker", "--loglevel=info", "--queues=default,payments"]
    else:
        argv = ["beat", "--loglevel=info"]

    print(f"\n⚙️  Starting Celery {mode}")
    celery_app.start(argv=argv)

def main():
    parser = argparse.ArgumentParser(
        description="Mebius Storefront Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "--mode",
        choices=["dev", "prod", "worker", "beat"],
        default="dev",
        help="What to run (default: dev)"
    )
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to (default: 8000)")
    parser.add_argument("--workers", type=int, default=4, help="Server processes in prod mode (default: 4)")

    args = parser.parse_args()

    print_banner(args.mode)
    if not check_environment():
        return 1

    if args.mode in ("worker", "beat"):
        run_celery(args.mode)
    else:
        run_api(args.host, args.port, reload=args.mode == "dev", workers=args.workers)

    return 0

if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
        sys.exit(0)
