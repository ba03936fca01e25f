import os

# Database Configuration
# Uses default credentials for local Docker Compose setup
DB_URL = os.getenv("DATABASE_URL", "postgres://user:password@db:5432/scalableshop_db")

# Application Metadata
PROJECT_NAME = "ScalableShop Order Saga"
VERSION = "1.0.0"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Kafka Configuration
KAFKA_BOOTSTRAP_SERVERS = os.getenv("KAFKA_BOOTSTRAP_SERVERS", "kafka:9092")
ORDER_CREATED_TOPIC = os.getenv("ORDER_CREATED_TOPIC", "order-created")
STOCK_RESERVED_TOPIC = os.getenv("STOCK_RESERVED_TOPIC", "stock-reserved")
STOCK_RESERVATION_FAILED_TOPIC = os.getenv("STOCK_RESERVATION_FAILED_TOPIC", "stock-reservation-failed")
INVENTORY_CONSUMER_GROUP = os.getenv("INVENTORY_CONSUMER_GROUP", "inventory-service")
ORDER_CONSUMER_GROUP = os.getenv("ORDER_CONSUMER_GROUP", "order-service")
CONSUMER_RETRY_DELAY = float(os.getenv("CONSUMER_RETRY_DELAY", 1)) # Pause before a failed message is redelivered

# Outbox Relayer Configuration
RELAY_INTERVAL = float(os.getenv("RELAY_INTERVAL", 5)) # Relayer checks for pending messages every N seconds
RELAY_BATCH_SIZE = int(os.getenv("RELAY_BATCH_SIZE", 100)) # How many messages to fetch per cycle
RELAY_QUARANTINE_MALFORMED = os.getenv("RELAY_QUARANTINE_MALFORMED", "false").lower() in ("1", "true", "yes")
OUTBOX_RELAYER_IN_PROCESS = os.getenv("OUTBOX_RELAYER_IN_PROCESS", "false").lower() in ("1", "true", "yes")
