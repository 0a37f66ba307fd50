"""
Page/limit pagination shared by the list endpoints.

Clients page with ``?page=N&limit=M``; views read the totals back through
``page_meta()`` and shape their own envelope around them.
"""
from rest_framework.pagination import PageNumberPagination


class PageLimitPagination(PageNumberPagination):
    page_size = 10
    page_size_query_param = 'limit'
    max_page_size = 100

    def page_meta(self) -> dict:
        paginator = self.page.paginator
        return {
            'currentPage': self.page.number,
            'totalPages': paginator.num_pages if paginator.count else 0,
            'total': paginator.count,
        }
