"""Launch the survey pipeline FastAPI server."""

import logging
import os

import uvicorn


def main():
    logging.basicConfig(
        level=os.getenv("SURVEY_PIPELINE_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("survey_pipeline.server:app", host="0.0.0.0", port=8000, reload=True)


if __name__ == "__main__":
    main()
