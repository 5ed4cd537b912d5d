#!/usr/bin/env python3
"""
Create the DynamoDB tables and S3 buckets used by the OTM pipeline.

Runs against AWS, or against LocalStack when USE_LOCALSTACK=true and
LOCALSTACK_ENDPOINT are set.
"""

import boto3
import os
import sys

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from shared.config import get_aws_endpoint
from otm.schema import (
    reports_table_definition,
    pending_table_definition,
    create_table,
    create_bucket
)


def prompt(label, default):
    """Ask for a value, falling back to the environment and then the default."""
    default = os.environ.get(label, default)
    value = input(f"{label} (default: {default}): ").strip()
    return value or default


def main():
    """Main function."""
    print("=" * 50)
    print("SICOEM OTM - Resource Setup Script")
    print("=" * 50)

    reports_table = prompt('OTM_REPORTS_TABLE', 'sicoem-otm-reports')
    pending_table = prompt('OTM_PENDING_TABLE', 'sicoem-otm-pending-uploads')
    local_bucket = prompt('OTM_LOCAL_BUCKET', 'sicoem-otm-local')
    documents_bucket = prompt('OTM_DOCUMENTS_BUCKET', 'sicoem-otm-documents')
    region = os.environ.get('AWS_DEFAULT_REGION', 'us-east-1')

    endpoint_url = get_aws_endpoint()
    if endpoint_url:
        print(f"\nUsing local endpoint: {endpoint_url}")

    dynamodb = boto3.resource('dynamodb', region_name=region, endpoint_url=endpoint_url)
    s3 = boto3.client('s3', region_name=region, endpoint_url=endpoint_url)

    print("\nCreating tables...")
    create_table(dynamodb, reports_table_definition(reports_table))
    create_table(dynamodb, pending_table_definition(pending_table))

    print("\nCreating buckets...")
    create_bucket(s3, local_bucket, region)
    create_bucket(s3, documents_bucket, region)

    print("\n" + "=" * 50)
    print("Setup complete!")
    print("=" * 50)
    print(f"\n  - tables: {reports_table}, {pending_table}")
    print(f"  - buckets: {local_bucket}, {documents_bucket}")


if __name__ == '__main__':
    main()
