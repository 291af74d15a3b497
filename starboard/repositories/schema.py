"""
Schema - Starboard Evaluation API
starboard/repositories/schema.py

Table definitions shared by the Snowflake and SQLite backends. Snowflake
does not enforce UNIQUE constraints, so the repositories never rely on them
for correctness: duplicate scores and double bookings are prevented by
conditional writes (MERGE on Snowflake). The constraints stay declared for
SQLite and as documentation.
"""

TABLES = [
    """
    CREATE TABLE IF NOT EXISTS ROLES (
        ID              VARCHAR(36) PRIMARY KEY,
        WORKSPACE_ID    VARCHAR(36) NOT NULL,
        NAME            VARCHAR(255) NOT NULL,
        PERMISSIONS     VARCHAR NOT NULL,
        CREATED_AT      TIMESTAMP_NTZ NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS WORKSPACE_MEMBERS (
        WORKSPACE_ID    VARCHAR(36) NOT NULL,
        USER_ID         VARCHAR(36) NOT NULL,
        ROLE_ID         VARCHAR(36) NOT NULL REFERENCES ROLES (ID),
        CREATED_AT      TIMESTAMP_NTZ NOT NULL,
        PRIMARY KEY (WORKSPACE_ID, USER_ID)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS APPLICATIONS (
        ID                              VARCHAR(36) PRIMARY KEY,
        WORKSPACE_ID                    VARCHAR(36) NOT NULL,
        TITLE                           VARCHAR(255) NOT NULL,
        MIN_SCORE                       FLOAT NOT NULL,
        MAX_SCORE                       FLOAT NOT NULL,
        REQUIRED_EVALUATOR_PERCENTAGE   FLOAT NOT NULL,
        STEP1_CUTOFF                    FLOAT NOT NULL,
        STEP2_CUTOFF                    FLOAT NOT NULL,
        CREATED_AT                      TIMESTAMP_NTZ NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS APPLICATION_SUBMISSIONS (
        ID                      VARCHAR(36) PRIMARY KEY,
        APPLICATION_ID          VARCHAR(36) NOT NULL REFERENCES APPLICATIONS (ID),
        APPLICANT_USER_ID       VARCHAR(36),
        APPLICANT_FIRST_NAME    VARCHAR(255) NOT NULL,
        APPLICANT_LAST_NAME     VARCHAR(255) NOT NULL,
        APPLICANT_EMAIL         VARCHAR(255) NOT NULL,
        COMPANY_NAME            VARCHAR(255),
        CURRENT_STEP            INTEGER,
        STATUS                  VARCHAR(20) NOT NULL,
        SUBMITTED_AT            TIMESTAMP_NTZ NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS EVALUATION_STEPS (
        ID              VARCHAR(36) PRIMARY KEY,
        APPLICATION_ID  VARCHAR(36) NOT NULL REFERENCES APPLICATIONS (ID),
        STEP_NUMBER     INTEGER NOT NULL,
        NAME            VARCHAR(255) NOT NULL,
        TYPE            VARCHAR(20) NOT NULL,
        IS_ACTIVE       BOOLEAN NOT NULL,
        PINNED_FIELDS   VARCHAR NOT NULL,
        CREATED_AT      TIMESTAMP_NTZ NOT NULL,
        UNIQUE (APPLICATION_ID, STEP_NUMBER)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS EVALUATION_CRITERIA (
        ID          VARCHAR(36) PRIMARY KEY,
        STEP_ID     VARCHAR(36) NOT NULL REFERENCES EVALUATION_STEPS (ID),
        NAME        VARCHAR(255) NOT NULL,
        WEIGHT      FLOAT NOT NULL,
        SORT_ORDER  INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS APPLICATION_SCORES (
        ID              VARCHAR(36) PRIMARY KEY,
        SUBMISSION_ID   VARCHAR(36) NOT NULL REFERENCES APPLICATION_SUBMISSIONS (ID),
        STEP_ID         VARCHAR(36) NOT NULL REFERENCES EVALUATION_STEPS (ID),
        JUDGE_ID        VARCHAR(36) NOT NULL,
        SCORES          VARCHAR NOT NULL,
        TOTAL_SCORE     FLOAT NOT NULL,
        NOTES           VARCHAR,
        CREATED_AT      TIMESTAMP_NTZ NOT NULL,
        UNIQUE (SUBMISSION_ID, STEP_ID, JUDGE_ID)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS INTERVIEW_SLOTS (
        ID              VARCHAR(36) PRIMARY KEY,
        STEP_ID         VARCHAR(36) NOT NULL REFERENCES EVALUATION_STEPS (ID),
        SLOT_DATE       DATE NOT NULL,
        START_TIME      VARCHAR(5) NOT NULL,
        END_TIME        VARCHAR(5) NOT NULL,
        MEETING_LINK    VARCHAR,
        SUBMISSION_ID   VARCHAR(36) UNIQUE REFERENCES APPLICATION_SUBMISSIONS (ID),
        BOOKED_AT       TIMESTAMP_NTZ,
        CREATED_AT      TIMESTAMP_NTZ NOT NULL
    )
    """,
]
