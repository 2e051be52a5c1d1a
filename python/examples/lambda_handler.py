import time
from llogger import Config, init, get_logger

init("orders-api", service_version="1.4.2", environment="prod",
     config=Config(time_format="Unix"))

def handler(event, context):
    log = get_logger(context, request_id=getattr(context, "aws_request_id", None))
    log.info("received order", order_id=event.get("order_id"))
    time.sleep(0.1)
    log.print({"loglevel": "info", "message": "done", "items": len(event.get("items", []))})
    return {"ok": True}

if __name__ == "__main__":
    class FakeContext:
        aws_request_id = "local-1"
        def __init__(self):
            self._end = time.time() + 3.0
        def get_remaining_time_in_millis(self):
            return int((self._end - time.time()) * 1000)

    handler({"order_id": "A-1", "items": [1, 2]}, FakeContext())
