from synthetics import journey, step


@journey("Search documentation")
def search_documentation(page, params, **_):

    @step("open home page")
    async def open_home(page, params, session):
        await page.goto(params["url"])

    @step("search for playwright")
    async def search(page, params, session):
        await page.fill("input[type=search]", "playwright")
        await page.keyboard.press("Enter")

    @step("results are shown")
    async def results_shown(page, params, session):
        await page.wait_for_selector("text=playwright", timeout=5000)
