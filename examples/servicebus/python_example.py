"""
sbrest Service Bus - Python Example

Demonstrates queue and topic operations with sbrest request builders executed
by HttpxTransport.

Usage:
    SERVICEBUS_CONNECTION_STRING="Endpoint=sb://...;SharedAccessKeyName=...;SharedAccessKey=..." \
        python python_example.py
"""

import os
import time

from sbrest import (
    BrokeredMessage,
    EmptyBusError,
    HttpxTransport,
    NonSerializedBodyError,
    QueueClient,
    SubscriptionClient,
    TopicClient,
    setup_logging,
)

CONNECTION_STRING = os.environ.get(
    "SERVICEBUS_CONNECTION_STRING",
    "Endpoint=http://localhost:8000/;SharedAccessKeyName=RootManageSharedAccessKey;SharedAccessKey=fake-key",
)


def queue_example(transport: HttpxTransport):
    """
    Demonstrates basic queue operations:
    - Send message
    - Receive message with peek-lock
    - Renew the lock, then complete the message
    """
    print("\n=== Queue Example ===\n")
    queue = QueueClient(CONNECTION_STRING, "orders")

    print("Sending messages to 'orders' queue...")
    transport.send(queue.send(BrokeredMessage.with_json_body({"order_id": 1001}, label="order")))
    transport.send(queue.send(BrokeredMessage.with_body("Order 1002 (plain text)")))
    print("✓ Sent 2 messages\n")

    while True:
        try:
            message = transport.receive(queue.receive(timeout=5))
        except EmptyBusError:
            print("Queue drained")
            break

        print(f"Message {message.properties.sequence_number}:")
        try:
            print(f"  Body (JSON): {message.get_body()}")
        except NonSerializedBodyError:
            print(f"  Body (raw): {message.text}")

        # Long processing: keep the lock alive before settling.
        time.sleep(1)
        transport.send(queue.renew(message))
        transport.send(queue.complete(message))
        print("  ✓ Completed")


def topic_subscription_example(transport: HttpxTransport):
    """
    Demonstrates topic/subscription operations:
    - Publish message to topic
    - Receive from a subscription, abandoning once before completing
    """
    print("\n\n=== Topic/Subscription Example ===\n")
    topic = TopicClient(CONNECTION_STRING, "events")
    subscription = SubscriptionClient(
        CONNECTION_STRING, "events", "all-events", credentials=topic.credentials
    )

    transport.send(topic.send(BrokeredMessage.with_body("High priority alert", label="alert")))
    print("✓ Published 1 message\n")

    message = transport.receive(subscription.receive(timeout=5))
    print(f"  Received: {message.text} (delivery {message.properties.delivery_count})")
    transport.send(subscription.abandon(message))
    print("  ↺ Abandoned, waiting for redelivery")

    message = transport.receive(subscription.receive(timeout=5))
    print(f"  Received: {message.text} (delivery {message.properties.delivery_count})")
    transport.send(subscription.complete(message))
    print("  ✓ Completed")


def main():
    setup_logging(level="INFO")
    with HttpxTransport() as transport:
        queue_example(transport)
        topic_subscription_example(transport)


if __name__ == "__main__":
    main()
