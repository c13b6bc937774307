from synthetics import journey, step


@journey("Login")
async def login(page, params, **_):
    users = params.get("users", ["standard_user"])

    # One step per configured user
    for user in users:
        @step(f"log in as {user}")
        async def log_in(page, params, session, user=user):
            await page.goto(params["url"] + "/login")
            await page.fill("#username", user)
            await page.fill("#password", params["password"])
            await page.click("button[type=submit]")

        @step(f"log out {user}")
        async def log_out(page, params, session):
            await page.click("text=Log out")
            await session.context.clear_cookies()
