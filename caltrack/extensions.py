from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS

from caltrack.services.sequencing import RequestSequencer

db = SQLAlchemy()
cors = CORS()

# Shared across requests so overlapping loads of one family can detect staleness
sequencer = RequestSequencer()
