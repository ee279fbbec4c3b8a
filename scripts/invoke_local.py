#!/usr/bin/env python3
"""
Submit a sample receipt through the Lambda handler and read its points back.
Run scripts/create_table.py first when pointing at a fresh LocalStack.
"""

import json
import os
import sys

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from shared.config import Settings
from receipts.handler import ReceiptApi
from receipts.service import ReceiptService

SAMPLE_RECEIPT = {
    'retailer': 'M&M Corner Market',
    'purchaseDate': '2022-03-20',
    'purchaseTime': '14:33',
    'items': [
        {'shortDescription': 'Gatorade', 'price': '2.25'},
        {'shortDescription': 'Gatorade', 'price': '2.25'},
        {'shortDescription': 'Gatorade', 'price': '2.25'},
        {'shortDescription': 'Gatorade', 'price': '2.25'}
    ],
    'total': '9.00'
}


def main():
    """Main function."""
    settings = Settings.from_env()
    receipt = SAMPLE_RECEIPT

    if len(sys.argv) > 1:
        with open(sys.argv[1]) as f:
            receipt = json.load(f)

    with ReceiptService.from_settings(settings) as service:
        api = ReceiptApi(service)

        response = api.handle({
            'httpMethod': 'POST',
            'path': '/receipts/process',
            'body': json.dumps(receipt)
        })
        print(f"POST /receipts/process -> {response['statusCode']} {response['body']}")

        if response['statusCode'] != 200:
            sys.exit(1)

        receipt_id = json.loads(response['body'])['id']
        response = api.handle({
            'httpMethod': 'GET',
            'path': f'/receipts/{receipt_id}/points',
            'pathParameters': {'id': receipt_id}
        })
        print(f"GET /receipts/{receipt_id}/points -> {response['statusCode']} {response['body']}")


if __name__ == '__main__':
    main()
