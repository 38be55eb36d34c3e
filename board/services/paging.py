import math


class Paging:
    """Page-link window for a list of results.

    Pages are 1-based. The window groups ``block_count`` page links, so with
    the default of 5 page 7 shows links 6 through 10.
    """

    def __init__(self, page: int, size: int, total: int, block_count: int = 5):
        if size < 1:
            raise ValueError("Page size must be positive")
        if block_count < 1:
            raise ValueError("Block count must be positive")

        self.current_page = max(page, 1)
        self.size = size
        self.total = max(total, 0)
        self.block_count = block_count
        self.total_pages = math.ceil(self.total / size)

        # Pages past the end still get a window of pages that exist.
        last_page = max(self.total_pages, 1)
        window_page = min(self.current_page, last_page)
        self.block_start = ((window_page - 1) // block_count) * block_count + 1
        self.block_end = min(self.block_start + block_count - 1, last_page)

    @property
    def prev_page(self):
        if self.block_start > 1:
            return self.block_start - 1
        return None

    @property
    def next_page(self):
        if self.block_end < self.total_pages:
            return self.block_end + 1
        return None
