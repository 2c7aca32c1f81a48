import asyncio
import unittest

from admin.config import ClientSettings
from admin.errors import BackendUnavailableError
from admin.firebase import FirebaseClient, FirebaseHandles


class FirebaseClientTests(unittest.IsolatedAsyncioTestCase):
    def settings(self, timeout=1.0):
        return ClientSettings(backend="firestore", firebase_init_timeout=timeout)

    async def test_all_waiters_share_one_initialization(self):
        calls = []
        handles = FirebaseHandles(firestore=object(), bucket=object())

        async def init():
            calls.append(1)
            await asyncio.sleep(0.01)
            return handles

        client = FirebaseClient(self.settings(), initializer=init)
        client.start()
        results = await asyncio.gather(*(client.handles() for _ in range(5)))

        self.assertEqual(len(calls), 1)
        self.assertTrue(all(r is handles for r in results))

    async def test_timeout_raises_unavailable(self):
        async def never_ready():
            await asyncio.sleep(10)

        client = FirebaseClient(self.settings(timeout=0.05), initializer=never_ready)
        with self.assertRaises(BackendUnavailableError):
            await client.handles()

    async def test_initialization_failure_raises_unavailable(self):
        async def broken():
            raise RuntimeError("no credentials")

        client = FirebaseClient(self.settings(), initializer=broken)
        with self.assertRaises(BackendUnavailableError) as ctx:
            await client.handles()
        self.assertIn("no credentials", str(ctx.exception))
        with self.assertRaises(BackendUnavailableError):
            await client.handles()

    async def test_from_handles(self):
        handles = FirebaseHandles(firestore="db", bucket="bucket")
        client = FirebaseClient.from_handles(self.settings(), handles)
        self.assertIs(await client.handles(), handles)

    async def test_bucket_is_resolved_once_on_first_use(self):
        resolved = []

        def resolver(app):
            resolved.append(app)
            return "bucket"

        client = FirebaseClient.from_handles(
            self.settings(), FirebaseHandles(firestore="db", app="app"), bucket_resolver=resolver
        )
        self.assertEqual((await client.handles()).firestore, "db")
        self.assertEqual(resolved, [])
        self.assertEqual(await client.bucket(), "bucket")
        self.assertEqual(await client.bucket(), "bucket")
        self.assertEqual(resolved, ["app"])

    async def test_missing_bucket_setting_leaves_documents_available(self):
        def resolver(app):
            raise ValueError("Storage bucket name not specified.")

        handles = FirebaseHandles(firestore="db")
        client = FirebaseClient.from_handles(self.settings(), handles, bucket_resolver=resolver)
        with self.assertRaises(BackendUnavailableError) as ctx:
            await client.bucket()
        self.assertIn("bucket name not specified", str(ctx.exception))
        self.assertIs(await client.handles(), handles)


if __name__ == "__main__":
    unittest.main()
