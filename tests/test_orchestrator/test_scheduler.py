"""Unit tests for BatchScheduler."""

import asyncio
import unittest

from redirectfinder.orchestrator.scheduler import BatchScheduler, TaskOutcome, iter_batches


class TestIterBatches(unittest.TestCase):
    """Test iter_batches()."""

    def test_splits_in_order(self):
        self.assertEqual(iter_batches([1, 2, 3, 4, 5], 2), [[1, 2], [3, 4], [5]])

    def test_empty(self):
        self.assertEqual(iter_batches([], 10), [])

    def test_invalid_size(self):
        with self.assertRaises(ValueError):
            iter_batches([1], 0)


class TestBatchScheduler(unittest.IsolatedAsyncioTestCase):
    """Test batch execution, pauses and failure handling."""

    def setUp(self):
        self.sleeps = []

        async def fake_sleep(seconds):
            self.sleeps.append(seconds)

        self.fake_sleep = fake_sleep

    async def test_results_in_input_order(self):
        scheduler = BatchScheduler(3, pause=0, sleep=self.fake_sleep)

        async def double(n):
            await asyncio.sleep(0.001 * (5 - n))
            return n * 2

        outcomes = await scheduler.run([1, 2, 3, 4, 5], double)

        self.assertEqual([o.item for o in outcomes], [1, 2, 3, 4, 5])
        self.assertEqual([o.result for o in outcomes], [2, 4, 6, 8, 10])
        self.assertTrue(all(o.succeeded for o in outcomes))

    async def test_concurrency_bounded_by_batch_size(self):
        """Test that a batch fully drains before the next one starts."""
        scheduler = BatchScheduler(10, pause=0, sleep=self.fake_sleep)
        in_flight = 0
        peak = 0
        started = []

        async def task(n):
            nonlocal in_flight, peak
            started.append(n)
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0)
            in_flight -= 1
            return n

        await scheduler.run(list(range(25)), task)

        self.assertEqual(peak, 10)
        self.assertEqual(sorted(started), list(range(25)))

    async def test_pause_between_batches_only(self):
        scheduler = BatchScheduler(10, pause=0.1, sleep=self.fake_sleep)

        async def task(n):
            return n

        await scheduler.run(list(range(25)), task)

        self.assertEqual(self.sleeps, [0.1, 0.1])

    async def test_no_pause_for_single_batch(self):
        scheduler = BatchScheduler(10, pause=0.1, sleep=self.fake_sleep)

        async def task(n):
            return n

        await scheduler.run([1, 2], task)
        self.assertEqual(self.sleeps, [])

    async def test_failure_does_not_stop_others(self):
        scheduler = BatchScheduler(2, pause=0, sleep=self.fake_sleep)

        async def task(n):
            if n == 2:
                raise ValueError("bad item")
            return n

        with self.assertLogs("redirectfinder.orchestrator.scheduler", level="ERROR"):
            outcomes = await scheduler.run([1, 2, 3], task)

        self.assertEqual(len(outcomes), 3)
        self.assertFalse(outcomes[1].succeeded)
        self.assertIsInstance(outcomes[1].error, ValueError)
        self.assertEqual(outcomes[2].result, 3)

    async def test_on_batch_done_called_per_batch(self):
        scheduler = BatchScheduler(2, pause=0, sleep=self.fake_sleep)
        batches = []

        async def task(n):
            return n

        await scheduler.run([1, 2, 3], task, on_batch_done=batches.append)

        self.assertEqual(
            [[o.item for o in batch] for batch in batches],
            [[1, 2], [3]],
        )
        self.assertIsInstance(batches[0][0], TaskOutcome)

    async def test_on_batch_done_error_propagates(self):
        scheduler = BatchScheduler(1, pause=0, sleep=self.fake_sleep)
        calls = []

        async def task(n):
            calls.append(n)
            return n

        def fail(outcomes):
            raise RuntimeError("store down")

        with self.assertRaises(RuntimeError):
            await scheduler.run([1, 2], task, on_batch_done=fail)
        self.assertEqual(calls, [1])

    async def test_empty_items(self):
        scheduler = BatchScheduler(pause=0, sleep=self.fake_sleep)

        async def task(n):
            return n

        self.assertEqual(await scheduler.run([], task), [])

    def test_invalid_batch_size(self):
        with self.assertRaises(ValueError):
            BatchScheduler(0)


if __name__ == "__main__":
    unittest.main()
