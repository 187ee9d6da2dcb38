#!/usr/bin/env python3
"""
MongoDB Collection Initialization Script
Creates collections and indexes for application
"""

import os
import json
from pymongo import GEOSPHERE
import logging
from typing import Dict
from .connection import get_database
from jsonschema import validate, ValidationError

logger = logging.getLogger(__name__)

# =============================================================================
# DATA STRUCTURE CONFIGURATION
# =============================================================================

SCHEMAS_DIR = os.path.join(os.path.dirname(__file__), 'schemas')

def load_json_schema(collection_name: str) -> Dict:
    """Load JSON schema for a collection from the schemas directory next to this file"""
    collection_to_schema_path = {
        'users': os.path.join(SCHEMAS_DIR, 'user.json'),
        'bars': os.path.join(SCHEMAS_DIR, 'bar.json'),
    }

    schema_path = collection_to_schema_path.get(collection_name)
    if not schema_path:
        logger.warning(f"No schema mapping found for collection: {collection_name}")
        return {}

    try:
        with open(schema_path, 'r') as f:
            return json.load(f)
    except FileNotFoundError:
        logger.warning(f"Schema file not found: {schema_path}")
        return {}
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in schema file {schema_path}: {e}")
        return {}

JSON_SCHEMAS = {
    "users": load_json_schema("users"),
    "bars": load_json_schema("bars"),
}

COLLECTIONS_CONFIG = {
    "users": {
        "indexes": [
            {"fields": "id", "unique": True},
            {"fields": "email", "unique": True},
            {"fields": "username", "unique": False},
            {"fields": "following", "unique": False},
            {"fields": "followers", "unique": False},
            {"fields": "followingBars", "unique": False}
        ]
    },
    "bars": {
        "indexes": [
            {"fields": "id", "unique": True},
            {"fields": "placeId", "unique": False},
            {"fields": "name", "unique": False},
            {"fields": "followers", "unique": False},
            {"fields": [("location", GEOSPHERE)], "unique": False}
        ]
    }
}

# Sample data keeps both sides of every relationship in sync
SAMPLE_DATA_TEMPLATES = {
    "users": [
        {
            "id": "64c0a6f4e5b1a2c3d4e5f601",
            "username": "matchday_mike",
            "email": "mike@test.com",
            "favTeams": ["arsenal"],
            "following": ["64c0a6f4e5b1a2c3d4e5f602"],
            "followers": [],
            "followingBars": ["64c0a6f4e5b1a2c3d4e5fb01"],
            "createdAt": "2024-01-15T10:30:00Z"
        },
        {
            "id": "64c0a6f4e5b1a2c3d4e5f602",
            "username": "pint_paula",
            "email": "paula@test.com",
            "favTeams": [],
            "following": [],
            "followers": ["64c0a6f4e5b1a2c3d4e5f601"],
            "followingBars": [],
            "createdAt": "2024-02-01T09:15:00Z"
        }
    ],
    "bars": [
        {
            "id": "64c0a6f4e5b1a2c3d4e5fb01",
            "name": "The Local Pub",
            "placeId": "ChIJ-local-pub",
            "location": {"type": "Point", "coordinates": [-73.9857, 40.7484]},
            "followers": ["64c0a6f4e5b1a2c3d4e5f601"],
            "createdAt": "2024-01-10T18:00:00Z"
        },
        {
            "id": "64c0a6f4e5b1a2c3d4e5fb02",
            "name": "Goal Line Sports Bar",
            "placeId": "ChIJ-goal-line",
            "location": {"type": "Point", "coordinates": [-73.9442, 40.6782]},
            "followers": [],
            "createdAt": "2024-01-12T18:00:00Z"
        }
    ]
}

# =============================================================================
# VALIDATION FUNCTIONS
# =============================================================================

def validate_document(collection_name: str, document: Dict) -> bool:
    """
    Validate a document against its JSON schema

    Args:
        collection_name: Name of the collection
        document: Document to validate

    Returns:
        bool: True if valid, False otherwise
    """
    schema = JSON_SCHEMAS.get(collection_name)
    if not schema:
        logger.warning(f"No schema found for collection: {collection_name}")
        return True  # Skip validation if no schema

    try:
        validate(instance=document, schema=schema)
        return True
    except ValidationError as e:
        logger.error(f"Validation error for {collection_name}: {e.message}")
        return False

def validate_sample_data() -> bool:
    """Validate all sample data against their schemas"""
    logger.info("Validating sample data against JSON schemas...")

    for collection_name, sample_data in SAMPLE_DATA_TEMPLATES.items():
        for i, document in enumerate(sample_data):
            if not validate_document(collection_name, document):
                logger.error(f"Sample data validation failed for {collection_name}[{i}]")
                return False

        logger.info(f"Sample data validation passed for {collection_name}")

    return True

# =============================================================================
# INITIALIZATION FUNCTIONS
# =============================================================================

def init_mongodb(drop_existing: bool = False, insert_samples: bool = False) -> bool:
    """
    Initialize MongoDB collections and indexes

    Args:
        drop_existing: Whether to drop existing collections
        insert_samples: Whether to insert sample data
    """
    try:
        db = get_database()

        logger.info("Initializing MongoDB collections...")

        if drop_existing:
            for collection_name in COLLECTIONS_CONFIG.keys():
                db[collection_name].drop()
                logger.info(f"Dropped collection: {collection_name}")

        create_collections_and_indexes(db)

        if insert_samples:
            if not validate_sample_data():
                logger.error("Sample data validation failed. Aborting initialization.")
                return False
            insert_sample_data(db)

        verify_setup(db)
        return True

    except Exception as e:
        logger.error(f"Error initializing MongoDB: {e}")
        raise

def create_collections_and_indexes(db):
    """Create collections and their indexes based on configuration"""

    for collection_name, config in COLLECTIONS_CONFIG.items():
        collection = db[collection_name]

        logger.info(f"Setting up collection: {collection_name}")

        for index_config in config["indexes"]:
            fields = index_config["fields"]
            unique = index_config.get("unique", False)

            try:
                collection.create_index(fields, unique=unique)
                index_name = fields if isinstance(fields, str) else str(fields)
                logger.info(f"  Index created: {index_name}")

            except Exception as e:
                logger.warning(f"  Index creation failed for {fields}: {e}")

def insert_sample_data(db):
    """Insert sample data based on templates"""

    for collection_name, sample_data in SAMPLE_DATA_TEMPLATES.items():
        collection = db[collection_name]

        # Only insert if collection is empty
        if collection.count_documents({}) == 0:
            try:
                # insert_many mutates its input with _id
                collection.insert_many([dict(doc) for doc in sample_data])
                logger.info(f"Sample data inserted into {collection_name}: {len(sample_data)} documents")

            except Exception as e:
                logger.warning(f"Sample data insertion failed for {collection_name}: {e}")
        else:
            logger.info(f"Skipping sample data for {collection_name} (not empty)")

def verify_setup(db):
    """Log document and index counts per collection"""
    collections = db.list_collection_names()

    logger.info("Verification Results:")

    for collection_name in COLLECTIONS_CONFIG.keys():
        if collection_name in collections:
            count = db[collection_name].count_documents({})
            indexes = list(db[collection_name].list_indexes())
            logger.info(f"  {collection_name}: {count} documents, {len(indexes)} indexes")
        else:
            logger.warning(f"  {collection_name}: collection not created yet")


# =============================================================================
# MAIN EXECUTION
# =============================================================================

if __name__ == "__main__":
    import argparse

    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Initialize MongoDB collections")
    parser.add_argument("--drop", action="store_true", help="Drop existing collections")
    parser.add_argument("--samples", action="store_true", help="Insert sample data")
    parser.add_argument("--list-config", action="store_true", help="List current configuration")

    args = parser.parse_args()

    if args.list_config:
        for name, config in COLLECTIONS_CONFIG.items():
            print(f"Collection: {name}")
            print(f"   Schema fields: {list(JSON_SCHEMAS.get(name, {}).get('properties', {}).keys())}")
            print(f"   Indexes: {len(config['indexes'])}")
            if name in SAMPLE_DATA_TEMPLATES:
                print(f"   Sample Data: {len(SAMPLE_DATA_TEMPLATES[name])} documents")
    else:
        init_mongodb(
            drop_existing=args.drop,
            insert_samples=args.samples
        )
