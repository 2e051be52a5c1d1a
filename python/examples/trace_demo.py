from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from llogger import Config, Deadline, Emitter

def main():
    trace.set_tracer_provider(TracerProvider())
    tracer = trace.get_tracer("llogger.demo")
    log = Emitter(Deadline.after(5.0), {"service": "py-trace-demo"},
                  Config(time_format="UnixNano", trace_field="trace"))
    with tracer.start_as_current_span("demo.span"):
        log.info("inside span")  # carries trace.trace_id / trace.span_id
    log.info("outside span")

if __name__ == "__main__":
    main()
