#!/usr/bin/env python3
"""Basic presence example — publish an activity and keep it alive.

Usage:
    # With the presence host (Discord desktop client) running:
    python examples/basic_presence.py

    # Verbose protocol logging:
    RICHPRESENCE_LOG=TRACE python examples/basic_presence.py

Press Ctrl+C to exit.
"""

import sys
import os
import threading
import time

# Allow running from repo root without installing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import richpresence as rp

APPLICATION_ID = 1355907951155740785

client = rp.Client(APPLICATION_ID, settings=rp.ClientSettings.from_env())

client.set_event_callback(lambda event: print(f"Event: {event}"))
client.set_log_callback(
    lambda result, level, message, msg: print(f"[{level}] [{result}] {message}")
)

result = client.connect()
print(f"Connect returned: {result}")

activity = rp.Activity(name="richpresence", client_id=APPLICATION_ID)
activity.details = "Line 1"
activity.state = "Party"
activity.timestamps.start = time.time()

activity.assets.large_image = "my_image"
activity.assets.large_text = "You hovered over the large image"
activity.assets.small_image = "my_image"
activity.assets.small_text = "I didn't have another image"

activity.party = rp.Party("test", current_size=2, max_size=5)

activity.add_button(rp.Button("Test", "https://example.com"))
activity.add_button(rp.Button("Test 2", "https://example.org"))

client.update_activity(
    activity, lambda result, msg: print(f"Updated activity: {result.description}")
)


def bump_party():
    time.sleep(5)
    activity.party.current_size = 3
    client.update_activity(activity)


threading.Thread(target=bump_party, daemon=True).start()

try:
    result = client.run()
except KeyboardInterrupt:
    result = rp.Result.OK
finally:
    client.close()

print(f"Client exited: {result} - {result.description}")
