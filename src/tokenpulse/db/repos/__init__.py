from tokenpulse.db.repos.bucket_repo import BucketRepository, SqlBucketRepository
from tokenpulse.db.repos.token_repo import TokenRepo

__all__ = ["BucketRepository", "SqlBucketRepository", "TokenRepo"]
