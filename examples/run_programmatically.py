import asyncio
import sys

from synthetics import Runner, RunOptions, any_failed, journey, step


async def main():
    """Example of registering and running journeys without the CLI"""
    runner = Runner()

    @journey("Example domain", runner=runner)
    def example_domain(page, params, **_):

        @step("open page", runner=runner)
        async def open_page(page, params, session):
            await page.goto(params["url"])

        @step("check heading", runner=runner)
        async def check_heading(page, params, session):
            heading = await page.text_content("h1")
            assert heading == "Example Domain", heading

    # Collect step timings from the event stream
    timings = []
    runner.on("step:end", lambda event: timings.append((event.step.name, event.elapsed_ms)))

    results = await runner.run(RunOptions(
        params={"url": "https://example.com"},
        reporter="default",
        playwright_options={"headless": True},
    ))

    for name, elapsed_ms in timings:
        print(f"{name}: {elapsed_ms:.0f} ms")

    return 1 if any_failed(results) else 0


if __name__ == '__main__':
    sys.exit(asyncio.run(main()))
