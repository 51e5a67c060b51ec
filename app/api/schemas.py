from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class Comment(BaseModel):
    text: str = Field(..., min_length=1)
    rating: int = Field(0, ge=0, le=5, description="0 means unknown")
    date: str = Field(..., examples=["2024-01-15"])
    author: str = "Unknown"
    helpful: int = Field(0, ge=0)
    source: str = Field(..., examples=["api", "html", "sample"])


class CommentsMetadata(BaseModel):
    fetchedAt: str
    limit: int
    sort: str


class CommentsData(BaseModel):
    appId: str
    totalComments: int
    comments: List[Comment]
    metadata: CommentsMetadata


class CommentsResponse(BaseModel):
    success: bool = True
    data: CommentsData


class CommentStats(BaseModel):
    totalComments: int
    ratingDistribution: Dict[int, int]
    dateDistribution: Dict[str, int]
    averageRating: float
    totalRating: int


class StatsMetadata(BaseModel):
    fetchedAt: str
    sampleSize: int


class StatsData(BaseModel):
    appId: str
    stats: CommentStats
    metadata: StatsMetadata


class StatsResponse(BaseModel):
    success: bool = True
    data: StatsData


class AppInfoModel(BaseModel):
    name: str = "Unknown"
    developer: str = "Unknown"
    category: str = "Unknown"
    rating: float = Field(0.0, ge=0, le=5)
    totalRatings: int = Field(0, ge=0)
    downloads: str = "Unknown"
    size: str = "Unknown"
    version: str = "Unknown"


class AppInfoMetadata(BaseModel):
    fetchedAt: str


class AppInfoData(BaseModel):
    appId: str
    appInfo: AppInfoModel
    metadata: AppInfoMetadata


class AppInfoResponse(BaseModel):
    success: bool = True
    data: AppInfoData


class BatchItemResult(BaseModel):
    appId: str
    success: bool = True
    totalComments: int
    comments: List[Comment]


class BatchItemError(BaseModel):
    appId: str
    success: bool = False
    error: str


class BatchData(BaseModel):
    totalApps: int
    successful: int
    failed: int
    results: List[BatchItemResult]
    errors: List[BatchItemError]
    metadata: CommentsMetadata


class BatchResponse(BaseModel):
    success: bool = True
    data: BatchData


class BatchRequest(BaseModel):
    """Batch body after validation (see app.api.validation)."""
    app_ids: List[str] = Field(..., min_length=1, max_length=10)
    limit: int = Field(20, ge=1, le=100)
    sort: str = "recent"


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: Optional[str] = None
