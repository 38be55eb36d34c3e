from board.extensions.extensions import ma


class PathDescriptorSchema(ma.Schema):
    group_name = ma.Str()
    save_path = ma.Str()
    original_name = ma.Str()


class AttachmentSchema(ma.Schema):
    id = ma.Int()
    group_name = ma.Str()
    save_path = ma.Str()
    original_name = ma.Str()
    content_type = ma.Str()
    size = ma.Int()
    download_url = ma.Method("get_download_url")

    def get_download_url(self, attachment):
        return f"/api/board/files/{attachment.id}"


class PostSummarySchema(ma.Schema):
    id = ma.Int()
    title = ma.Str()
    user_id = ma.Str()
    nickname = ma.Function(lambda post: post.author.nickname if post.author else None)
    attachment_count = ma.Function(lambda post: len(post.attachments))
    created_at = ma.DateTime()


class PostDetailSchema(PostSummarySchema):
    content = ma.Str()
    updated_at = ma.DateTime()
    attachments = ma.List(ma.Nested(AttachmentSchema))


class PagingSchema(ma.Schema):
    current_page = ma.Int()
    size = ma.Int()
    total = ma.Int()
    total_pages = ma.Int()
    block_count = ma.Int()
    block_start = ma.Int()
    block_end = ma.Int()
    prev_page = ma.Int(allow_none=True)
    next_page = ma.Int(allow_none=True)
