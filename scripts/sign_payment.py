"""
Sign an order/payment pair with the configured key secret, for calling
/api/verify-payment by hand.

    python scripts/sign_payment.py order_Abc123 [pay_Xyz789]
"""
import argparse
import json
import uuid

from app.config.load_env import load_env
from app.config.settings import load_settings
from app.services.verification_service import compute_signature


def main():
    parser = argparse.ArgumentParser(description="Generate a Razorpay checkout signature")
    parser.add_argument("order_id")
    parser.add_argument("payment_id", nargs="?", help="defaults to a random pay_fake_ id")
    args = parser.parse_args()

    load_env()
    settings = load_settings()
    payment_id = args.payment_id or f"pay_fake_{uuid.uuid4().hex[:10]}"

    body = {
        "order_id": args.order_id,
        "payment_id": payment_id,
        "signature": compute_signature(args.order_id, payment_id, settings.key_secret),
    }
    print("--- POST this to /api/verify-payment ---")
    print(json.dumps(body, indent=2))


if __name__ == "__main__":
    main()
